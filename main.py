"""
Entry-point.  Keeps top-level script tiny.
"""
import logging

import pygame
from sonar import config, gui

def main():
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s")
    pygame.init()
    cfg = config.load()
    app = gui.SonarGUI(cfg)
    app.run()
    config.save(cfg)

if __name__ == "__main__":
    main()
