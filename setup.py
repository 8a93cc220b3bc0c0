from setuptools import setup, find_packages
from pathlib import Path

this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

install_requires = [
    "pydantic >= 2, < 3",
    "typing_extensions >= 4.1, < 5",
    "tomli >= 2.0.0, < 3",
    "networkx >= 2.5",
    "click >= 8, < 9",
    "rich-click >= 1.6.0, < 2",
    "rich >= 10.16",
    "eth_utils >= 2.0.0",
    "eth_abi >= 4.0.0",
    "pycryptodome >= 3.10",
    "websocket-client >= 1.4.0",
]

extras_require = dict(
    tests=[
        "pytest >= 7",
    ],
    dev=[
        "black",
        "isort >= 5.10.0, < 6",
    ],
)

setup(
    name="evm-state-setter",
    description="Locate, read and overwrite Solidity state variables in the storage of deployed contracts.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Ackee Blockchain",
    version="0.1.0",
    packages=find_packages(exclude=("tests",)),
    keywords=[
        "solidity",
        "ethereum",
        "blockchain",
        "storage",
        "storage layout",
        "testing",
        "anvil",
        "hardhat",
    ],
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require=extras_require,
    license="ISC",
    entry_points=dict(
        console_scripts=[
            "statesetter=statesetter.cli.__main__:main",
        ]
    ),
)
