from setuptools import setup


setup(
    name="sheet-merger",
    version="0.1.0",
    description="Merge Excel sheets and workbooks with different columns into one table",
    packages=["sheet_merger"],
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "pandas",
        "openpyxl",
        "streamlit",
        "requests",
    ],
    extras_require={
        "excel-legacy": ["xlrd"],
        "ods": ["odfpy"],
        "all": ["xlrd", "odfpy"],
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "sheet-merger=sheet_merger.cli:main",
        ]
    },
)
