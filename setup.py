from setuptools import setup

setup(
    name="mp3_info",
    license="MIT",
    version="0.1.0",
    packages=["mp3_info"],
    python_requires=">=3.8",
    install_requires=["requests"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["mp3_info = mp3_info.cli:main"],
    },
)
