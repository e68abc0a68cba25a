"""
Package installation and setup script for moku-pona.
"""

from setuptools import setup, find_packages
import os

# Read the README file
readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
if os.path.exists(readme_path):
    with open(readme_path, 'r', encoding='utf-8') as f:
        long_description = f.read()
else:
    long_description = 'moku-pona - Watch Gopher menus and feeds for changes'

# Read requirements
requirements_path = os.path.join(os.path.dirname(__file__), 'requirements.txt')
if os.path.exists(requirements_path):
    with open(requirements_path, 'r', encoding='utf-8') as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]
else:
    requirements = [
        'feedparser>=6.0.10',
        'python-dotenv>=1.0.0',
    ]

setup(
    name='moku-pona',
    version='1.0.0',
    description='Watch Gopher menus and feeds for changes and keep an update log',
    long_description=long_description,
    long_description_content_type='text/markdown',

    # Package discovery
    packages=find_packages(exclude=['tests*']),

    # Dependencies
    install_requires=requirements,

    # Optional dependencies
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
            'black>=23.0.0',
            'flake8>=5.0.0',
        ],
        'test': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
        ]
    },

    # Entry points
    entry_points={
        'console_scripts': [
            'moku-pona=moku_pona.main:main',
        ],
    },

    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Internet :: Gopher',
    ],

    python_requires='>=3.10',

    keywords='gopher phlog feeds updates',

    license='MIT',

    zip_safe=False,
)
