from pathlib import Path

from setuptools import setup, find_packages

readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name='bwf-markers',
    version='1.0.0',
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires='>=3.11',
    install_requires=[
        'colored>=2.2.3',
        'halo>=0.0.31',
        'python-dotenv>=1.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.4.0',
        ],
    },
    entry_points='''
        [console_scripts]
        bwfmarkers=bwfmarkers.__main__:main
    ''',
    license='MIT',
    keywords='bwf broadcast wave markers cue audacity labels',
    description='Export markers embedded in Broadcast Wave files as Audacity label files',
    long_description=long_description,
    long_description_content_type='text/markdown',
)
