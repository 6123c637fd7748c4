[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "geno"
version = "0.1.0"
description = "Workspace, project and build model for a C/C++ IDE, with a small indentation-based config format"
requires-python = ">=3.10"
dependencies = []
keywords = ["ide", "build", "workspace", "project", "compiler", "gcc", "msvc", "config"]
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
    "Topic :: Text Editors :: Integrated Development Environments (IDE)",
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["geno"]

[tool.pytest.ini_options]
addopts = "-ra"
