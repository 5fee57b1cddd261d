import setuptools

try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "Per-workspace sandbox images with drift detection and cleanup"

setuptools.setup(
    name="wsbox",
    version="0.1.0",
    description="Per-workspace sandbox images with drift detection and cleanup",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src", include=["wsbox", "wsbox.*"]),
    package_data={
        "wsbox": ["docker/Dockerfile"],
    },
    include_package_data=True,
    install_requires=[
        "typer",
        "rich",
        "questionary",
        "pydantic>=2",
        "python-dotenv",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "wsbox=wsbox.cli.main:app",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
    ],
    python_requires=">=3.9",
)
