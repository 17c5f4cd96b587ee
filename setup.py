import io

from setuptools import find_packages
from setuptools import setup

with io.open("README.md", "rt", encoding="utf8") as f:
    readme = f.read()

tests_require = [
    "pytest",
    "pytest-cov",
    "pytest-mock",
    "pytest-click",
]

setup(
    name="didactic",
    version="0.3.0",
    description="A static site builder for course material and notes.",
    long_description=readme,
    long_description_content_type="text/markdown",
    license="BSD",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    zip_safe=False,
    platforms="any",
    python_requires=">=3.9",
    install_requires=[
        "Babel",
        "beautifulsoup4",
        "click>=7.0",
        "htmlmin",
        "inifile>=0.4.1",
        "Jinja2>=3.0",
        "MarkupSafe",
        "mistune>=2,<3",
        "Werkzeug>=2",
    ],
    tests_require=tests_require,
    extras_require={
        "test": tests_require,
    },
    classifiers=[
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Topic :: Internet :: WWW/HTTP :: Site Management",
        "Topic :: Text Processing :: Markup :: HTML",
    ],
    entry_points="""
        [console_scripts]
        didactic=didactic.cli:main
    """,
)
