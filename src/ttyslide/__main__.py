from ttyslide.cli import main

main()
