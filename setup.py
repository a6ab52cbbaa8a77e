import setuptools

setuptools.setup(
    name="sap-landscape-sizing",
    version="0.1.0",
    description=(
        "Generates per VM compute and storage configuration for SAP landscapes "
        "on Azure"
    ),
    python_requires=">=3.10",
    packages=setuptools.find_packages(exclude=("tests*",)),
    install_requires=[
        "pydantic>2.0",
        "numpy",
    ],
    extras_require={
        "fetch": ["requests"],
        "test": ["pytest", "requests"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    entry_points={
        "console_scripts": [
            "sap-sizing = sap_landscape_sizing.tools.generate_sizing:main",
            "fetch-sizing-catalog = sap_landscape_sizing.tools.fetch_catalog:main",
        ]
    },
    include_package_data=True,
    package_data={
        "": [
            "hardware/profiles/*.json",
        ]
    },
)
