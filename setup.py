import setuptools
import os

own_dir = os.path.abspath(os.path.dirname(__file__))


def requirements():
    with open(os.path.join(own_dir, 'requirements.txt')) as f:
        for line in f.readlines():
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            yield line


def modules():
    return [
        'ctx',
        'gitutil',
        'http_requests',
        'version',
    ]


def version():
    with open(os.path.join(own_dir, 'VERSION')) as f:
        return f.read().strip()


setuptools.setup(
    name='gardener-relnotes',
    version=version(),
    description='Gardener Changelog Generator',
    python_requires='>=3.11',
    py_modules=modules(),
    packages=['ci', 'github', 'relnotes'],
    install_requires=list(requirements()),
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'relnotes=relnotes.cli:main',
        ],
    },
)
