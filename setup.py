from setuptools import setup, find_packages

setup(
    name="oligo-count",
    version="0.1.0",
    packages=find_packages(where = "src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "pandas",
        "numpy",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
entry_points={
            "console_scripts": [
                "oligo_count=oligo_count.cli:main",
            ],
    },
    description="Count reads containing query sequences in FASTQ files with a mismatch allowance",
)
