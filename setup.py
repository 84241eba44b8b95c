from pathlib import Path
from setuptools import setup, find_packages


def read_requirements(filename):
    with open(filename) as f:
        return [req for req in (req.partition('#')[0].strip() for req in f) if req]


setup(
    name='perfdb',
    version='0.1.0',
    description='Performance report history store.',
    long_description=Path('README.rst').read_text(),
    license='MIT',
    packages=find_packages(include=['perfdb', 'perfdb.*']),
    package_data={'perfdb': ['config.yml', 'reports/*.xsd']},
    install_requires=read_requirements('requirements.in'),
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'perfdb = perfdb.cli.main:app',
        ]
    },
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: POSIX',
        'Programming Language :: Python :: 3 :: Only',
        'Topic :: Software Development :: Testing',
    ],
)
