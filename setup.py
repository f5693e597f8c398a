import setuptools

setuptools.setup(
    name="beam_hdphmm",
    version="0.1.0",
    license="MIT",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    description="Beam sampling for hierarchical Dirichlet process hidden Markov models",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=["scipy", "numpy", "terminaltables", "sympy"],
    extras_require={"test": ["pytest", "pytest-cov", "black", "isort", "darglint"]},
    test_suite="py.test",
    tests_require=["pytest", "pytest-cov", "black", "isort", "darglint"],
)
