import setuptools

install_requires = [
    "Flask>=2.3",
    "Flask-SQLAlchemy>=3.1",
    "SQLAlchemy>=2.0",
    "blinker>=1.6",
    "PyYAML",
    "Werkzeug",
]

tests_require = [
    "pytest",
    "pytest-xdist",
]

dev_requires = tests_require + [
    # For coverage
    "coverage",
    "pytest-cov",
    # Static code analysis
    "flake8",
    # Test sessions against several pythons / databases
    "nox",
]


def get_long_description():
    description = open("README.rst").read()
    description += "\n\n" + open("CHANGES.rst").read()
    return description


setuptools.setup(
    # Metadata
    name="tagger",
    version="0.1.0.dev0",
    license="LGPL",
    description="Polymorphic tagging for Flask-SQLAlchemy models",
    long_description=get_long_description(),
    long_description_content_type="text/x-rst",
    platforms="any",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Web Environment",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU Lesser General Public License v2 (LGPLv2)",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Framework :: Flask",
    ],
    # Data
    packages=setuptools.find_packages(include=["tagger", "tagger.*"]),
    package_data={"tagger.core": ["default_logging.yml"]},
    zip_safe=False,
    python_requires=">=3.8",
    # Requirements & dependencies
    install_requires=install_requires,
    extras_require={
        "tests": tests_require,
        "dev": dev_requires,
    },
)
