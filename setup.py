# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="drivegames",
    version="1.2.0",
    description="Explorador de carpetas de juegos en la nube con resolución y despacho de tipos de juego",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["drivegames", "drivegames.*"]),
    python_requires=">=3.8",
    install_requires=[
        "requests",  # Cliente HTTP para la API de Drive
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'drivegames=drivegames.interface.cli.app:main',  # Explorador vía CLI
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
