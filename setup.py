from setuptools import setup, find_packages

setup(
    name="subsetcv",
    version="0.1.0",
    packages=find_packages("src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "pandas",
        "scikit-learn",
        "scipy",
        "tqdm",
        "numba"
    ],
    extras_require={
        "test": ["pytest"]
    }
)
