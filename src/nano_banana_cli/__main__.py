"""nano-banana-cli 入口点。

支持: python -m nano_banana_cli
"""

from .app import main

if __name__ == "__main__":
    main()
