from setuptools import setup, find_packages

setup(
    name="module-auditor",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2.5.0",
        "PyYAML>=6.0",
        "SQLAlchemy>=2.0.0",
        "psycopg[binary]>=3.1.0",
        "pefile>=2023.2.7",
        "netifaces-plus>=0.12.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "module-auditor=module_auditor.cli:main",
        ],
    },
    python_requires=">=3.11",
)
