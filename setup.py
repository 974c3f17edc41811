from setuptools import setup, find_packages

def parse_requirements(requirements):
    with open(requirements) as f:
        return [l.strip('\n') for l in f if l.strip('\n') and not l.startswith('#')]

requirements = parse_requirements("requirements.txt")

setup(
    name='parkgolf_admin',
    version='0.0.1',
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["parkgolf_admin", "parkgolf_admin.*"]),
    entry_points={
        "console_scripts": [
            "parkgolf-admin=parkgolf_admin.cli.cli:cli",
        ],
    }
)
