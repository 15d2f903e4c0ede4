from setuptools import setup, find_packages

setup(
    name="echo_rpc",
    version="0.1.0",
    description="echo_rpc - Minimal unary Echo service over gRPC",
    author="echo_rpc Team",
    packages=find_packages(include=["echo_rpc", "echo_rpc.*"]),
    package_data={"echo_rpc.proto": ["*.proto"]},
    install_requires=[
        "grpcio>=1.50.0",
        "protobuf>=4.22.0",
        "opentelemetry-api>=1.14.0",
        "opentelemetry-sdk>=1.14.0",
        "opentelemetry-exporter-otlp>=1.14.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-benchmark",
            "pytest-cov",
            "black",
            "isort",
            "pylint",
        ],
    },
    entry_points={
        "console_scripts": [
            "echo-server=echo_rpc.cli:run_server",
            "echo-client=echo_rpc.cli:run_client",
        ]
    },
    python_requires=">=3.9",
)
