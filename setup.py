import re

from setuptools import setup

with open('src/keyload/version.py', 'r') as fd:
    __version__ = re.search(r'^__version__\s*=\s*[\'"]([^\'"]*)[\'"]', fd.read(), re.MULTILINE).group(1)


install_requires = [
    "cryptography>=42.0",
    "pyasn1>=0.6.1",
    "pycryptodome>=3.20",
    "pydantic>=2.6",
    "PyYAML>=6.0",
]

testing_extras = [
    "black",
    "coverage",
    "isort",
    "mypy",
    "pylama",
    "pytest",
    "types-PyYAML",
    "wheel",
]

setup(
    name="keyload",
    version=__version__,
    description="Format-agnostic RSA key decoding (PEM/DER, PKIX/PKCS#1/PKCS#8)",
    classifiers=["Programming Language :: Python :: 3",],
    keywords="rsa pem der pkcs1 pkcs8 asn1",
    python_requires=">=3.11",
    packages=[
        "keyload",
        "keyload.common",
        "keyload.decoder",
        "keyload.tools",
    ],
    package_dir={"": "src"},
    include_package_data=True,
    zip_safe=False,
    install_requires=install_requires,
    extras_require={"testing": testing_extras,},
    entry_points={
        "console_scripts": [
            "keyload-inspect = keyload.tools.keyinspect:main",
        ]
    },
)
