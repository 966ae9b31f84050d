from setuptools import setup, find_packages

setup(
    name="cloudo",
    version="0.1.0",
    packages=find_packages(include=["cloudo", "cloudo.*"]),
    install_requires=[
        "boto3>=1.26.0",
        "botocore>=1.29.0",
        "requests>=2.28.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cloudo=cloudo.cli:main",
        ],
    },
    python_requires=">=3.8",
    description="Cloud fast provisioning script for a minimal AWS network",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
