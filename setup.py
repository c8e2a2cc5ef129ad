"""Set-up file for porewell for installations using ``pip install .``"""
from setuptools import find_packages, setup


with open("requirements.txt") as f:
    required = f.read().splitlines()


setup(
    name="porewell",
    version="0.3.0",
    license="GPL",
    keywords=["porous media simulation wells automatic differentiation"],
    install_requires=required,
    extras_require={"testing": ["pytest>=7"]},
    description=(
        "Single-phase flow toward wells, solved by Newton's method with "
        "automatic differentiation"
    ),
    platforms=["Linux", "Windows", "Mac OS-X"],
    python_requires=">=3.10",
    packages=find_packages("src"),
    package_dir={"": "src"},
    zip_safe=False,
)
