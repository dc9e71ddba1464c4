"""
Setup script for diagram-stream.
"""

from setuptools import setup, find_packages, Command
import subprocess
import sys


class TestCommand(Command):
    """Run the test suite."""
    description = 'Run unit tests with pytest'
    user_options = []

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        """Run all tests."""
        print("Running diagram-stream Tests")
        print("=" * 50)

        try:
            subprocess.run([sys.executable, '-m', 'pytest', 'tests/', '-v'], check=True)
            print("✓ Unit tests passed")
        except subprocess.CalledProcessError:
            print("✗ Unit tests failed")
            sys.exit(1)
        except FileNotFoundError:
            print("⚠ pytest not installed. Run: pip install -e .[dev]")
            sys.exit(1)


# Read long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()


setup(
    name="diagram-stream",
    version="0.1.0",
    description="Incremental rendering of JSON element arrays streamed as tool input",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Claude4Ξlope",
    author_email="xilope@esus.name",
    packages=find_packages(include=['diagram_stream*']),
    include_package_data=True,
    install_requires=[
        "aiofiles>=23.0.0",
        "jsonpath-ng>=1.6.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-asyncio>=0.21.0',
            'black>=23.0.0',
            'mypy>=1.0.0',
            'ruff>=0.1.0',
        ],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "diagram-stream=diagram_stream.__main__:main",
        ],
    },
    cmdclass={
        'test': TestCommand,
    },
    license="GPL-3.0-or-later",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="json streaming partial-json mcp diagram tool-input",
)
