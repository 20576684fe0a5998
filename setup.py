from setuptools import setup, find_packages

setup(
    name="xflplot",
    version="0.1.0",
    description="Quantile-ribbon tables and plots for labelled fisheries arrays using xarray.",
    packages=find_packages(include=["xflplot", "xflplot.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "xarray>=2022.06",
        "matplotlib",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.11",
)
