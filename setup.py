import os.path

from setuptools import find_packages, setup

with open(os.path.join(os.path.dirname(__file__), 'README.md')) as f:
    LONG_DESCRIPTION = f.read()
    DESCRIPTION = LONG_DESCRIPTION.splitlines()[0].lstrip('#').strip()

setup(
    name='vkcci',
    version='0.1.0',

    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type='text/markdown',
    keywords=['kubernetes', 'virtual-kubelet', 'serverless', 'cci', 'k8s'],
    license='MIT',
    classifiers = [
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
        'Programming Language :: Python :: Implementation :: CPython',
        'Topic :: Software Development :: Libraries',
    ],

    zip_safe=True,
    packages=find_packages(include=['vkcci', 'vkcci.*']),
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'vkcci = vkcci.cli:main',
        ],
    },

    python_requires='>=3.8',
    install_requires=[
        'typing_extensions',    # 0.20 MB
        'python-json-logger<3', # 0.05 MB
        'click',                # 0.60 MB
        'aiohttp',              # 7.80 MB
        'multidict',            # (already required by aiohttp)
        'pyyaml',               # 0.90 MB
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
            'pytest-mock',
        ],
    },
    package_data={"vkcci": ["py.typed"]},
)
