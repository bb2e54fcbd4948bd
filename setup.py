import os

from setuptools import setup, find_packages


def _read_file(path: str) -> str:
    with open(path) as f:
        return f.read().strip()


# Versions
file_dir = os.path.dirname(os.path.realpath(__file__))
zkif_version = _read_file(os.path.join(file_dir, 'zkif', 'VERSION'))
packages = find_packages(include=['zkif', 'zkif.*'])


setup(
    # Metadata
    name='zkif',
    version=zkif_version,
    license='MIT',
    description='Zkif translates between an interchange format for zero-knowledge statements and an in-memory rank-1 '
                'constraint system, and composes circuits from independently supplied gadgets called through '
                'serialized messages.',

    # Dependencies
    python_requires='>=3.8,<4',
    install_requires=[
        'appdirs>=1.4,<2',
        'argcomplete>=1,<4',
        'semantic-version>=2.8.4,<3',
    ],
    extras_require={
        'test': [
            'parameterized>=0.7',
            'pytest>=6',
        ],
    },

    # Contents
    packages=packages,
    package_data={'zkif': ['VERSION']},
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "zkif=zkif.__main__:main"
        ]
    },
)
