import setuptools

VERSION = '0.1.0'

setup_params = dict(
    name='rbrowser',
    version=VERSION,
    author='Kenneth VanderLinde',
    author_email='kwvanderlinde@gmail.com',
    keywords='http browser cache',
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    package_dir={'rbrowser': 'rbrowser'},
    include_package_data=True,
    description='A minimal HTTP(S) fetcher with redirects and a disk cache',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    install_requires=['requests>=2.18.4'],
    extras_require={
        'dev': [
            'mockito>=1.1.1',
            'pytest>=7.0',
            'pytest-cov>=4.0',
            'ddt>=1.2',
        ]
    },
    entry_points={
        'console_scripts': [
            'rbrowser = rbrowser.cli:main',
        ],
    },
    python_requires='>=3.7',
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Natural Language :: English',
        'Operating System :: OS Independent',

        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
    ],
)


if __name__ == '__main__':
    setuptools.setup(**setup_params)
