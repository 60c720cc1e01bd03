"""
Riding Results tool
"""

from setuptools import setup, find_packages

setup(
    name='Riding-Results',
    version='0.1',
    license='BSD-3-Clause',
    description="Aggregates poll-by-poll election results into riding and party totals",
    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: BSD License',
        'Programming Language :: Python :: 3',
    ],
    packages=find_packages(),
    install_requires=[
        'XlsxWriter',
    ],
    entry_points={
        'console_scripts': [
            'riding-results=pyridings.run:main',
        ],
    },
)
