from setuptools import find_packages, setup

setup(
    name="logoextrude",
    version="0.1.0",
    author="Jan Bureš",
    description="Image to 3D-printable STL extrusion toolkit",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    include_package_data=True,
    install_requires=[      # Core dependencies
        "numpy",
        "scipy",
        "trimesh",
        "tqdm"
    ],
    extras_require={        # Development dependencies
        "dev": [
            "black",
        ],
        "test": [
            "pytest",
        ],
    },
    python_requires=">=3.8",  # Specify the compatible Python version
)
