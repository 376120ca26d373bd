from setuptools import setup, find_packages

setup(
    name             = 'subtext-core',
    version          = '1.0.0',
    description      = 'Subtext — chat transcript parsing and relationship-safety classification',
    author           = 'Subtext',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest', 'pytest-asyncio', 'httpx'],
    },
    entry_points     = {
        'console_scripts': [
            'subtext = subtext.cli:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
