#!/usr/bin/python3

import os

from setuptools import setup, Command, find_packages


class CleanCommand(Command):
    user_options = []
    def initialize_options(self):
        #pylint: disable=attribute-defined-outside-init
        self.cwd = None
    def finalize_options(self):
        #pylint: disable=attribute-defined-outside-init
        self.cwd = os.getcwd()
    def run(self):
        assert os.getcwd() == self.cwd, 'Must be in package root: %s' % self.cwd
        os.system('rm -rf ./build ./dist ./*.pyc ./*.egg-info')

setup(
    name='pcmk-reconcile',
    version='0.1.0',
    description=(
        'Converge pacemaker constraints and cluster properties to a declared '
        'state'
    ),
    packages=find_packages(
        exclude=["pcmk_reconcile_test", "pcmk_reconcile_test.*"]
    ),
    python_requires='>=3.9',
    install_requires=[
        'lxml',
        'dacite',
    ],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=False,
    entry_points={
        'console_scripts': [
            'pcmk-reconcile = pcmk_reconcile.app:main',
        ],
    },
    cmdclass={
        'clean': CleanCommand,
    }
)
