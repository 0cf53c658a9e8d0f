"""Setup script for the volume-seeder package."""
from setuptools import setup, find_packages

if __name__ == "__main__":
    setup(
        name="volume-seeder",
        version="0.1.0",
        description="First-run seeding of persistent volumes for a GPU image-generation container",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        package_data={
            "": ["*.toml"]
        },
        install_requires=[
            "pydantic>=2.5.0",
            "toml>=0.10.2",
            "python-dotenv>=1.0.0",
        ],
        extras_require={
            'dev': [
                "pytest>=7.4",
                "pytest-mock>=3.12",
                "pytest-cov>=4.1",
                "mypy>=1.7",
                "ruff>=0.1.6",
            ],
        },
        entry_points={
            "console_scripts": [
                "seed-entrypoint=volume_seeder.entrypoint:cli_main",
                "volume-seeder=volume_seeder.__main__:main",
            ],
        },
        python_requires=">=3.11",
    )
