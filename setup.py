from setuptools import setup, find_namespace_packages

# Read dependencies from requirements.txt
with open("requirements.txt", "r") as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]

setup(
    name="yt-notify",
    version="0.1.0",
    packages=find_namespace_packages(include=["src", "src.*"]),
    py_modules=["main"],
    install_requires=requirements,
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "yt-notify=main:main",  # allows running the watcher as `yt-notify`
        ],
    },
)
