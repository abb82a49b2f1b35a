from setuptools import setup, find_packages

setup(
    name="membership_core",
    version="0.1.0",
    description="Membership rules and theme color allocation for Group Ledger",
    packages=find_packages(),
    install_requires=[],
    python_requires=">=3.9",
)
