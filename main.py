#!/usr/bin/env python3
"""Image Rename Tool - rename images from vision-model descriptions."""

from image_rename.cli import main

if __name__ == "__main__":
    main()
