[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvshell"
version = "0.1.0"
description = "A small teaching-kernel toolkit: system-call tracing, paging, ELF headers, a shell parser, wc and a first-fit allocator"
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "shell", "strace", "paging", "elf", "x86", "teaching"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xvshell-wc = "xvshell.wc:main"

[tool.hatch.build.targets.wheel]
packages = ["xvshell"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
