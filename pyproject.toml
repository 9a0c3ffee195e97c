[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stmcrypto"
version = "0.1.0"
description = "AES-OCB authenticated encryption of short messages with 128-bit printable keys and 64-bit nonces"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = [
    "aes",
    "ocb",
    "ocb3",
    "aead",
    "authenticated-encryption",
    "base64",
    "nonce",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
stm-encrypt = "stmcrypto.cli:encrypt_main"
stm-decrypt = "stmcrypto.cli:decrypt_main"

[tool.hatch.build.targets.wheel]
packages = ["stmcrypto"]

[tool.hatch.build.targets.sdist]
include = [
    "stmcrypto",
    "tests",
    "pyproject.toml",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
