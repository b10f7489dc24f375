[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ssrtools"
version = "0.1.0"
description = "Building blocks for a proxy server: a lenient JSON parser, a list container, regex host rules, socket address helpers and a background DNS resolver"
requires-python = ">=3.10"
dependencies = [
    "dnspython",
]
keywords = ["proxy", "json", "dns", "resolver", "sockaddr", "hostname", "rules", "xorshift"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["ssrtools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
