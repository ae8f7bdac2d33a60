"""
Setup configuration for the reactor monitor library.
"""

from setuptools import setup, find_packages

with open("reactor_monitor/README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="reactor-monitor",
    version="1.0.0",
    author="Nuclear Sim Team",
    description="Closed-loop reactor safety controller with PID rod control and interlocks",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["reactor_monitor", "reactor_monitor.*"]),
    package_data={"reactor_monitor": ["*.yaml", "README.md"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.19.0",
        "dataclass-wizard[yaml]>=0.22,<1.0",
        "PyYAML>=5.4",
        "rich>=10.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.0",
            "pytest-cov>=2.10",
        ],
    },
    entry_points={
        "console_scripts": [
            "reactor-monitor=reactor_monitor.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
