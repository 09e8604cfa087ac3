import os, re
from setuptools import setup, find_packages

# Read the README file
with open("README.md") as f:
    readme = f.read()

PACKAGE = "better_validator"


def read_file(filepath: str) -> str:
    """Read and return the content of a file."""
    with open(filepath, "r", encoding="utf-8") as f:
        return f.read().strip()


def get_dependencies() -> list:
    """Retrieve dependencies from the requirements file."""
    depfile = "requirements.txt"
    if os.path.exists(depfile):
        return [
            line.strip() for line in read_file(depfile).splitlines()
            if line.strip() and not line.startswith("#")
        ]
    return []


def _version_component(name: str, text: str) -> str:
    match = re.search(rf"^{name} = (.*)$", text, re.M)
    if not match:
        raise RuntimeError(f"Unable to find {name} in '_version.py'.")
    return match.group(1).split("#")[0].strip().strip("'\"")


def get_version() -> str:
    """Retrieve the package version from the version file."""
    versionfile = os.path.join(PACKAGE, "_version.py")

    if not os.path.exists(versionfile):
        raise FileNotFoundError("Version file '_version.py' not found.")

    text = read_file(versionfile)
    version = ".".join(
        _version_component(name, text)
        for name in ("VERSION_MAJOR", "VERSION_MINOR", "VERSION_PATCH")
    )
    suffix = _version_component("VERSION_SUFFIX", text)
    return f"{version}-{suffix}" if suffix else version


extras_require = {
    # Testing dependencies
    "test": [
        "pytest>=7.4.0",
        "pytest-cov>=4.1.0",
        "pytest-xdist>=3.3.0",
        "hypothesis>=6.88.0",  # Property-based testing
    ],

    # Development dependencies
    "dev": [
        "pytest>=7.4.0",
        "pytest-cov>=4.1.0",
        "hypothesis>=6.88.0",
        "black>=23.0.0",
        "flake8>=6.0.0",
        "pyright>=1.1.0",
        "pre-commit>=3.4.0",
    ],
}

extras_require["all"] = sorted({
    dep for deps in extras_require.values() for dep in deps
})

# Setup the package
if __name__ == '__main__':
    setup(
        name="better-validator",
        version=get_version(),
        description="Configurable object validation with cached rule metadata and selective short-circuiting.",
        long_description=readme,
        long_description_content_type="text/markdown",
        license="MIT",
        packages=find_packages(include=[PACKAGE, f"{PACKAGE}.*"]),
        install_requires=get_dependencies(),
        extras_require=extras_require,
        python_requires=">=3.8",
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: MIT License",
            "Operating System :: OS Independent",
            "Programming Language :: Python :: 3",
            "Programming Language :: Python :: 3.8",
            "Programming Language :: Python :: 3.9",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Topic :: Software Development :: Libraries :: Python Modules",
            "Topic :: Utilities",
        ],
        keywords="validation rules annotated dataclasses pydantic",
        entry_points={
            "console_scripts": [
                "better-validator=better_validator.__main__:main",
            ],
        },
    )
