from os import path

from setuptools import setup, find_packages

import monobuild.scripts.version as version

here = path.abspath(path.dirname(__file__))

with open(path.join(here, 'README.rst'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='monobuild',
    description='Install, build and collect the sub applications of a monorepo',
    long_description=long_description,
    version=version.version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    python_requires='>=3.6',
    install_requires=[
        'click>=8.0',
        'humanfriendly',
        'rainbow_logging_handler',
        'pyyaml'
    ],
    tests_require=['pytest'],
    extras_require={
        'test': ['pytest']
    },
    license='GPLv3',
    platforms='linux',
    classifiers=[
        "Programming Language :: Python :: 3 :: Only",
        "Operating System :: POSIX :: Linux",
        "Topic :: Software Development :: Build Tools",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        'Intended Audience :: Developers',
    ],
    entry_points='''
        [console_scripts]
        monobuild=monobuild.scripts.run:run
    '''
)
