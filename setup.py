#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""The setup script."""

from setuptools import setup, find_packages

with open('README.rst') as readme_file:
    readme = readme_file.read()

with open('requirements.txt') as r:
    requirements = [line.strip() for line in r
                    if line.strip() and not line.startswith('#')]

test_requirements = ['pytest', ]

setup(
    name='kubeboot',
    version='0.3.0',
    description='Bootstrap kubeadm clusters on bare-metal and testbed nodes',
    long_description=readme,
    long_description_content_type='text/x-rst',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.8',
    install_requires=requirements,
    tests_require=test_requirements,
    extras_require={'test': test_requirements},
    entry_points={
        'console_scripts': ['kubeboot=kubeboot.kubeboot:main'],
    },
    classifiers=[
        'Environment :: Console',
        'Intended Audience :: System Administrators',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3',
        'Topic :: System :: Clustering',
    ],
)
