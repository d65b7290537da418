from setuptools import setup
from setuptools import find_packages

setup(name='dm32read',
      description='Read-only memory reader and decoder for the Baofeng DM-32',
      packages=find_packages(include=["dm32read*"]),
      include_package_data=True,
      version='0.1.0',
      python_requires=">=3.10,<4",
      install_requires=[
          'pyserial',
      ],
      extras_require={
          'test': ['pytest', 'ddt'],
      },
      entry_points={
          'console_scripts': [
              "dm32read=dm32read.cli.main:main",
          ],
      },
      )
