from setuptools import setup, find_packages

def parse_requirements(requirements):
    with open(requirements) as f:
        return [l.strip('\n') for l in f if l.strip('\n') and not l.startswith('#')]

requirements = parse_requirements("requirements.txt")

setup(
    name='coursehub_backend',
    version='0.1.0',
    install_requires=requirements,
    package_dir={'': 'src'},
    packages=find_packages('src'),
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "coursehub=coursehub_backend.cli.cli:cli",
        ],
    }
)
