import io

import setuptools

name = 'chaosspace'
desc = 'Parameterized fault-injection action space for microservice systems.'

author = "Evernym"
author_email = 'devin.fisher@evernym.com'

packages = setuptools.find_packages(exclude=['test', 'test.*'])

test_require = []
with io.open('requirements-dev.txt') as f:
    test_require = [l.strip() for l in f
                    if l.strip() and not l.startswith('#')]

install_require = []
with io.open('requirements.txt') as f:
    install_require = [l.strip() for l in f
                       if l.strip() and not l.startswith('#')]

setup_params = dict(
    name=name,
    version='0.1.0',
    description=desc,
    author=author,
    author_email=author_email,
    packages=packages,
    install_requires=install_require,
    tests_require=test_require,
    extras_require={'test': test_require},
    python_requires='>=3.6'
)


def main():
    """Package installation entry point."""
    setuptools.setup(**setup_params)


if __name__ == '__main__':
    main()
