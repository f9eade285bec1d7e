import traceback
from setuptools import find_packages, setup


def get_packages():
    """Get package list with debug information."""
    try:
        packages = find_packages(include=["taskboard", "taskboard.*"])
        print(f"Found packages: {packages}")
        return packages
    except Exception as e:
        print(f"Error finding packages: {e}")
        print(f"Traceback:\n{traceback.format_exc()}")
        raise


try:
    setup(
        name="taskboard",
        version="0.1.0",
        description="Task and project management API with an audited task history",
        packages=get_packages(),
        package_data={"taskboard": ["config.yml"]},
        include_package_data=True,
        install_requires=[
            # Web Framework
            "fastapi>=0.100.0",
            "uvicorn>=0.15.0",
            "httpx>=0.24.0",
            # Core Dependencies
            "pydantic>=2.0",
            "python-dotenv>=0.19.0",
            "PyYAML>=6.0",
            # Utils
            "rich>=10.0.0",
            "typer>=0.9.0",
        ],
        extras_require={
            "test": [
                "pytest>=7.0.0",
                "pytest-asyncio>=0.21.0",
            ],
        },
        python_requires=">=3.9",
        entry_points={
            "console_scripts": [
                "taskboard=taskboard.cli:app",
                "taskboard-web=taskboard.web.server:main",
            ],
        },
    )
except Exception as e:
    print(f"Setup failed: {e}")
    print(f"Traceback:\n{traceback.format_exc()}")
    raise
