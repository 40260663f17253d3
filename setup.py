from setuptools import setup, find_packages

setup(
    name='marine-sdm',
    version='0.1.0',
    description='Join presence/absence survey points to marine environmental rasters for species distribution modelling',
    author='Matthew Whittle',
    author_email='matthewjwhittle@gmail.com',
    packages=find_packages(include=['marine_sdm', 'marine_sdm.*']),
    package_data={'marine_sdm': ['config/*.yaml']},
    python_requires='>=3.11',
    install_requires=[
        'numpy',
        'pandas>=2.0',
        'geopandas',
        'shapely',
        'pyproj',
        'rasterio>=1.4',
        'xarray',
        'rioxarray',
        'scipy',
        'requests',
        'tqdm',
        'typer',
        'typing_extensions',
        'PyYAML',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'marine-sdm=marine_sdm.cli:app',
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
)
