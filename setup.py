from setuptools import find_packages, setup

setup(
    name="pitchsync",
    version="1.0.0",
    description="Pitch-synchronous time-scale modification of speech audio.",
    author="Araray Velho",
    author_email="araray@gmail.com",
    packages=find_packages(include=["pitchsync", "pitchsync.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "pandas",
        "soundfile",
        "click",
        "rich",
        "pydantic>=2",
        "toml",
        "tabulate",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "pitchsync=pitchsync.cli.main:cli",
        ],
    },
)
