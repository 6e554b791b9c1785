from setuptools import setup, find_packages
import re

# Read version from lifecalc/__init__.py
with open('lifecalc/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='life-calc',
    version=version,
    packages=find_packages(include=['lifecalc', 'lifecalc.*']),
    package_data={
        'lifecalc.sdk.taxes': ['rules/*.yaml'],
    },
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'rich>=13.0',
        'pydantic>=2.0.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'dev': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'life-calc=lifecalc.cli.__main__:main',
            'life-calc-mcp=lifecalc.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Personal finance trajectory projections and scenario comparison.',
    python_requires='>=3.10',
)
