from setuptools import setup, find_packages

setup(
    name="sysbench-runner",
    version="1.0.0",
    description="A CLI tool that runs sysbench fileio disk benchmarks end to end",
    packages=find_packages(),
    entry_points={"console_scripts": ["sysbench-runner=sysbench_runner.cli:main"]},
    install_requires=["matplotlib", "openpyxl"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.8",
    classifiers=["Programming Language :: Python :: 3", "Operating System :: POSIX :: Linux", "License :: OSI Approved :: MIT License", "Development Status :: 4 - Beta"],
    include_package_data=True,
    zip_safe=False,
)
