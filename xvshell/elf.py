"""ELF executable file header and program header."""

from __future__ import annotations

import struct
from dataclasses import dataclass

ELF_MAGIC = 0x464C457F  # "\x7FELF" in little endian

ELF_PROG_LOAD = 1

ELF_PROG_FLAG_EXEC = 1
ELF_PROG_FLAG_WRITE = 2
ELF_PROG_FLAG_READ = 4

_ELFHDR = struct.Struct("<I12sHHIIIIIHHHHHH")
_PROGHDR = struct.Struct("<8I")

ELFHDR_SIZE = _ELFHDR.size
PROGHDR_SIZE = _PROGHDR.size


class ElfFormatError(ValueError):
    """Raised for data that is not a valid ELF header."""


@dataclass(frozen=True)
class ElfHeader:
    """The ELF file header."""

    magic: int = ELF_MAGIC
    elf: bytes = bytes(12)
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    def pack(self) -> bytes:
        """Encode the header in its on-disk form."""
        if len(self.elf) != 12:
            raise ElfFormatError("identification bytes must be 12 long")
        try:
            return _ELFHDR.pack(
                self.magic, bytes(self.elf), self.type, self.machine, self.version,
                self.entry, self.phoff, self.shoff, self.flags, self.ehsize,
                self.phentsize, self.phnum, self.shentsize, self.shnum, self.shstrndx,
            )
        except struct.error as exc:
            raise ElfFormatError(str(exc)) from None


@dataclass(frozen=True)
class ProgramHeader:
    """One program section header."""

    type: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    flags: int = 0
    align: int = 0

    @property
    def loadable(self) -> bool:
        """Whether the segment is loaded into memory."""
        return self.type == ELF_PROG_LOAD

    def pack(self) -> bytes:
        """Encode the header in its on-disk form."""
        try:
            return _PROGHDR.pack(
                self.type, self.off, self.vaddr, self.paddr,
                self.filesz, self.memsz, self.flags, self.align,
            )
        except struct.error as exc:
            raise ElfFormatError(str(exc)) from None


def parse_elf_header(data: bytes) -> ElfHeader:
    """Decode the ELF header at the start of *data*."""
    data = bytes(data)
    if len(data) < ELFHDR_SIZE:
        raise ElfFormatError("too short for an ELF header")
    header = ElfHeader(*_ELFHDR.unpack_from(data))
    if header.magic != ELF_MAGIC:
        raise ElfFormatError("bad ELF magic")
    return header


def parse_program_header(data: bytes) -> ProgramHeader:
    """Decode the program header at the start of *data*."""
    data = bytes(data)
    if len(data) < PROGHDR_SIZE:
        raise ElfFormatError("too short for a program header")
    return ProgramHeader(*_PROGHDR.unpack_from(data))