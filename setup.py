"""Setup script for rankn."""
from setuptools import setup, find_packages  # type: ignore
import rankn

setup(
    name='rankn',
    version=rankn.version,
    description='Algorithmic subtyping for predicative higher-rank polymorphism',  # noqa
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    license='MIT',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Topic :: Software Development :: Compilers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.12',
    ],
    keywords='type-checking bidirectional higher-rank polymorphism',
    packages=find_packages(include=['rankn', 'rankn.*']),  # type: ignore
    python_requires='>=3.11',
    install_requires=[
        'typing-extensions>=4',
    ],
    extras_require={
        'test': [
            'coverage>=6.4.4',
            'hypothesis>=6',
            'pytest>=7',
        ],
        'dev': ['axblack==20220330', 'mypy>=1.1.1', 'pre-commit>=2.6.0,<3'],
    },
)
