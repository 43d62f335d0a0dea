"""
Bond Cash-Flow & Yield Analytics Engine – Package Setup

French (constant-installment) amortization with grace periods, TCEA/TREA
internal-rate-of-return search, Macaulay/modified duration and convexity.
"""
from setuptools import setup, find_packages

setup(
    name             = "bond-cashflow-engine",
    version          = "1.0.0",
    description      = "French-method bond cash flow schedule and yield analytics",
    packages         = find_packages(exclude=["tests", "tests.*"]),
    py_modules       = ["main"],
    python_requires  = ">=3.10",
    install_requires = [
        "numpy>=1.24.0",
        "pandas>=2.0.0",
        "scipy>=1.10.0",
    ],
    extras_require   = {
        "test": ["pytest>=7.0"],
    },
    entry_points     = {
        "console_scripts": ["bond-cashflow = main:main"]
    },
    classifiers      = [
        "Programming Language :: Python :: 3",
        "Topic :: Office/Business :: Financial",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ],
)
