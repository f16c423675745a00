# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="allocdu",
    version="1.0.0",
    description="du-style report of allocated (on-disk) space, with hard-link deduplication",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["allocdu", "allocdu.*"]),
    package_data={"allocdu": ["interface/locales/*.json"]},
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        'console_scripts': [
            'allocdu=allocdu.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Topic :: System :: Filesystems",
    ],
)
