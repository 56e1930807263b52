from setuptools import setup, find_packages

setup(
    name='spotexport',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    description='Python cli utility to export your Spotify playlists to JSON, CSV, XLS and XLSX.',
    python_requires='>=3.9',
    include_package_data=True,
    install_requires=[
        'requests',
        'spotipy>=2.23.0',
        'colorama>=0.4.6',
        'PyYAML>=6.0',
        'jsonschema>=4.0.0',
        'pathvalidate>=2.5.0',
        'openpyxl>=3.1.0',
        'xlwt>=1.3.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'xlrd>=2.0.1',
        ],
    },
    entry_points={
        'console_scripts': [
            'spotexport = spotexport.main:main',
        ],
    },
)
