from setuptools import setup

setup(
    name='sshhop',
    version='1.0.0',
    description='Terminal host picker for ~/.ssh/config with password login via sshpass',
    packages=['sshhop', 'sshhop.tui'],
    python_requires='>=3.9',
    install_requires=[
        'textual>=0.86',
        'rich',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'sshhop=sshhop.main:main',
        ],
    },
    classifiers=[
        'Environment :: Console :: Curses',
        'Operating System :: POSIX',
        'Programming Language :: Python :: 3',
    ],
)
