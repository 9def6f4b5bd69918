from setuptools import find_packages, setup

setup(
    name="maa-installer",
    version="0.1.0",
    description="Install and update prebuilt MaaCore packages",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "requests",
        "aiohttp",
        "aiofiles",
        "platformdirs",
        "PyYAML",
        "rich",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "maa-installer=maa_installer.cli:main",
        ],
    },
)
