from setuptools import setup, find_packages

with open("README.md") as readme_file:
    README = readme_file.read()

REQUIREMENTS = [
    "numpy >= 1.15.2",
    "scipy >= 1.1.0",
    "matplotlib >= 3.0.3",
    "tabulate >= 0.8.2",
    "setuptools_scm >= 3.1.0",
    "Click >= 7.0",
    "quantiphy >= 2.14.0",
    "PyYAML >= 3.13",
]

# Extra dependencies.
EXTRAS = {
    "test": [
        "pytest",
    ],
    "dev": [
        "pylint",
        "bandit",
    ]
}

setup(
    name="fresp",
    use_scm_version={
        "write_to": "fresp/_version.py",
        "fallback_version": "0.1.0",
    },
    description="Frequency response and impedance plotter",
    long_description=README,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "fresp.config": ["fresp.yaml.dist", "fresp.yaml.dist.default"]
    },
    entry_points={
        "console_scripts": [
            "%s = fresp.__main__:cli" % "fresp"
        ]
    },
    install_requires=REQUIREMENTS,
    extras_require=EXTRAS,
    setup_requires=['setuptools_scm'],
    license="GPLv3",
    zip_safe=False,
    classifiers=[
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
    ]
)
