# -*- coding: utf-8 -*-

from setuptools import setup


setup(
    name='chunkparse',
    version='0.1.0',
    packages=['chunkparse'],
    python_requires='>=3.7',
    description='Incremental, chunk-by-chunk parsing with functional parser '
        'combinators',
    license='MIT',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
    ],
)
