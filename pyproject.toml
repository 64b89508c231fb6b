[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mirc"
version = "0.1.0"
description = "A small mid-level IR with functions and blocks, lowered to textual LLVM IR"
requires-python = ">=3.10"
dependencies = []
keywords = ["ir", "compiler", "codegen", "llvm", "intermediate-representation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Compilers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mirc = "mirc.codegen:main"

[tool.hatch.build.targets.wheel]
packages = ["mirc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
