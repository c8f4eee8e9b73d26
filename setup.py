from setuptools import setup, find_packages
import os
import re

# Read version from __init__.py
with open(os.path.join("ollama_ctx", "__init__.py"), "r") as f:
    content = f.read()
    version_match = re.search(r"__version__\s*=\s*['\"]([^'\"]*)['\"]", content)
    version = version_match.group(1) if version_match else "0.0.0"

# Read long description from README
with open("README.md", "r") as f:
    long_description = f.read()

setup(
    name="ollama-ctx",
    version=version,
    author="Mark Ward",
    description="Bulk-configure the context window (num_ctx) of Ollama models",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/MarkWard0110/ollama-ctx",
    packages=find_packages(exclude=["tests", "tests.*", "ollama_ctx.tests", "ollama_ctx.tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=[
        "requests>=2.31.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "flake8>=6.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ollama-ctx=ollama_ctx.cli:main",
        ],
    },
)
