from setuptools import setup, find_packages

setup(
    name="livescribe",
    version="0.1.0",
    description="Continuous live lecture transcription over restartable speech recognition engines",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.21.0",
        "google-cloud-speech>=2.16.0",
        "google-auth>=2.10.0",
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "microphone": [
            "pyaudio>=0.2.11",
        ],
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "livescribe=livescribe.main:main",
        ],
    },
)
