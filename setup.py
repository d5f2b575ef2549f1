import re
from pathlib import Path
from setuptools import find_packages, setup

# get version from nystrom_cv/__init__.py
__version__ = 0.0
with open('nystrom_cv/__init__.py') as f:
    infos = f.readlines()
for line in infos:
    if "__version__" in line:
        match = re.search(r"__version__ = '([^']*)'", line)
        __version__ = match.groups()[0]

# read the contents of the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.rst").read_text()

requirements = [
    "numpy",
    "scipy",
    "scikit-learn",
    # "cupy",  # optional backend
    # "torch",  # optional backend
    # "matplotlib",  # for visualization only
    # "pytest",  # for testing only
]

extras_require = {
    "all_backends": ["cupy", "torch"],
    "viz": ["matplotlib"],
    "test": ["pytest", "matplotlib"],
}

extras_require["doc"] = sum(list(extras_require.values()), [])

if __name__ == "__main__":
    setup(
        name='nystrom_cv',
        description="Nystrom kernel ridge regression with incremental "
        "cross-validation",
        license='BSD (3-clause)',
        version=__version__,
        packages=find_packages(exclude=["examples"]),
        install_requires=requirements,
        extras_require=extras_require,
        long_description=long_description,
        long_description_content_type='text/x-rst',
    )
