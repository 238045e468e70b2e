# packsbuilder/__main__.py
from packsbuilder.cli import main

if __name__ == "__main__":
    main()
