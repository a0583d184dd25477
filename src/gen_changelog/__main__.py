from gen_changelog.cli import main

if __name__ == "__main__":
    main()
