from setuptools import setup, find_packages

setup(
    name="SSValidity",
    version="0.1.0",
    packages=find_packages(include=["ssvalidity", "ssvalidity.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "pandas",
        "matplotlib",
    ],
    extras_require={
        "parallel": ["joblib"],
        "progress": ["tqdm"],
        "test": ["pytest", "scipy", "joblib"],
    },
    entry_points={
        "console_scripts": ["ssvalidity=ssvalidity.cli:main"],
    },
    description="Monte Carlo study of semi-supervised score-matching imputation for validity coefficients",
)
